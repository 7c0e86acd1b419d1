"""AWS domain services built on a validated session.

Each service groups the boto3 APIs of one domain (access, infra, storage,
...) and exposes them to the template engine through a driver mapping
template verbs to SDK operations. Clients are created lazily from the
shared session.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..cloud.driver import Driver, DriverFn, DriverLookupError
from ..cloud.service import Service
from .session import AWSSession


Operation = Tuple[str, str]


class AWSDriver(Driver):
    """Driver dispatching template verbs to boto3 client operations."""

    def __init__(
        self,
        service: "AWSService",
        operations: Dict[Tuple[str, str], Operation],
        logger: logging.Logger,
    ) -> None:
        self._service = service
        self._operations = operations
        self._logger = logger
        self._dry_run = False

    @property
    def service(self) -> "AWSService":
        """Service whose clients this driver calls."""
        return self._service

    def capabilities(self) -> List[Tuple[str, str]]:
        """Get supported (action, entity) pairs."""
        return sorted(self._operations)

    def lookup(self, action: str, entity: str) -> DriverFn:
        try:
            api_name, operation = self._operations[(action, entity)]
        except KeyError:
            raise DriverLookupError(
                f"{self._service.name} driver does not support '{action} {entity}'"
            )

        def run(params: Dict[str, Any]) -> Any:
            if self._dry_run:
                self._logger.info(f"dry run: {action} {entity} ({api_name}.{operation})")
                return None
            self._logger.info(f"{action} {entity} ({api_name}.{operation})")
            client = self._service.client(api_name)
            return getattr(client, operation)(**params)

        return run

    def set_dry_run(self, dry_run: bool) -> None:
        self._dry_run = dry_run

    def set_logger(self, logger: logging.Logger) -> None:
        self._logger = logger


class AWSService(Service):
    """Base class for AWS domain services."""

    service_name = ""
    api_names: Tuple[str, ...] = ()
    operations: Dict[Tuple[str, str], Operation] = {}

    def __init__(
        self,
        session: AWSSession,
        config: Any,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(session, config, logger)
        self._clients: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self.service_name

    @property
    def region(self) -> str:
        """Region of the underlying session."""
        return self.session.region

    def client(self, api_name: str) -> Any:
        """Get boto3 client for one of this service's APIs.

        Args:
            api_name: AWS API name (e.g., 'ec2')

        Returns:
            Cached boto3 client

        Raises:
            ValueError: When the API does not belong to this service
        """
        if api_name not in self.api_names:
            raise ValueError(f"API '{api_name}' is not part of the {self.name} service")
        if api_name not in self._clients:
            self._clients[api_name] = self.session.client(api_name)
        return self._clients[api_name]

    def drivers(self) -> List[Driver]:
        return [AWSDriver(self, self.operations, self.logger)]


class AccessService(AWSService):
    service_name = "access"
    api_names = ("iam", "sts")
    operations = {
        ("create", "user"): ("iam", "create_user"),
        ("delete", "user"): ("iam", "delete_user"),
        ("create", "group"): ("iam", "create_group"),
        ("delete", "group"): ("iam", "delete_group"),
        ("create", "role"): ("iam", "create_role"),
        ("delete", "role"): ("iam", "delete_role"),
        ("create", "policy"): ("iam", "create_policy"),
        ("delete", "policy"): ("iam", "delete_policy"),
        ("create", "accesskey"): ("iam", "create_access_key"),
        ("delete", "accesskey"): ("iam", "delete_access_key"),
    }


class InfraService(AWSService):
    service_name = "infra"
    api_names = ("ec2", "elbv2", "autoscaling", "rds", "ecr", "ecs")
    operations = {
        ("create", "instance"): ("ec2", "run_instances"),
        ("delete", "instance"): ("ec2", "terminate_instances"),
        ("start", "instance"): ("ec2", "start_instances"),
        ("stop", "instance"): ("ec2", "stop_instances"),
        ("create", "vpc"): ("ec2", "create_vpc"),
        ("delete", "vpc"): ("ec2", "delete_vpc"),
        ("create", "subnet"): ("ec2", "create_subnet"),
        ("delete", "subnet"): ("ec2", "delete_subnet"),
        ("create", "securitygroup"): ("ec2", "create_security_group"),
        ("delete", "securitygroup"): ("ec2", "delete_security_group"),
        ("create", "keypair"): ("ec2", "import_key_pair"),
        ("delete", "keypair"): ("ec2", "delete_key_pair"),
        ("create", "volume"): ("ec2", "create_volume"),
        ("delete", "volume"): ("ec2", "delete_volume"),
        ("create", "loadbalancer"): ("elbv2", "create_load_balancer"),
        ("delete", "loadbalancer"): ("elbv2", "delete_load_balancer"),
        ("create", "scalinggroup"): ("autoscaling", "create_auto_scaling_group"),
        ("delete", "scalinggroup"): ("autoscaling", "delete_auto_scaling_group"),
        ("create", "database"): ("rds", "create_db_instance"),
        ("delete", "database"): ("rds", "delete_db_instance"),
        ("create", "repository"): ("ecr", "create_repository"),
        ("delete", "repository"): ("ecr", "delete_repository"),
        ("create", "containercluster"): ("ecs", "create_cluster"),
        ("delete", "containercluster"): ("ecs", "delete_cluster"),
    }


class StorageService(AWSService):
    service_name = "storage"
    api_names = ("s3",)
    operations = {
        ("create", "bucket"): ("s3", "create_bucket"),
        ("delete", "bucket"): ("s3", "delete_bucket"),
        ("create", "s3object"): ("s3", "put_object"),
        ("delete", "s3object"): ("s3", "delete_object"),
    }


class MessagingService(AWSService):
    service_name = "messaging"
    api_names = ("sns", "sqs")
    operations = {
        ("create", "topic"): ("sns", "create_topic"),
        ("delete", "topic"): ("sns", "delete_topic"),
        ("create", "subscription"): ("sns", "subscribe"),
        ("delete", "subscription"): ("sns", "unsubscribe"),
        ("create", "queue"): ("sqs", "create_queue"),
        ("delete", "queue"): ("sqs", "delete_queue"),
    }


class DnsService(AWSService):
    service_name = "dns"
    api_names = ("route53",)
    operations = {
        ("create", "zone"): ("route53", "create_hosted_zone"),
        ("delete", "zone"): ("route53", "delete_hosted_zone"),
        ("create", "record"): ("route53", "change_resource_record_sets"),
        ("delete", "record"): ("route53", "change_resource_record_sets"),
    }


class LambdaService(AWSService):
    service_name = "lambda"
    api_names = ("lambda",)
    operations = {
        ("create", "function"): ("lambda", "create_function"),
        ("delete", "function"): ("lambda", "delete_function"),
    }


class MonitoringService(AWSService):
    service_name = "monitoring"
    api_names = ("cloudwatch",)
    operations = {
        ("create", "alarm"): ("cloudwatch", "put_metric_alarm"),
        ("delete", "alarm"): ("cloudwatch", "delete_alarms"),
        ("start", "alarm"): ("cloudwatch", "enable_alarm_actions"),
        ("stop", "alarm"): ("cloudwatch", "disable_alarm_actions"),
    }


class CdnService(AWSService):
    service_name = "cdn"
    api_names = ("cloudfront",)
    operations = {
        ("create", "distribution"): ("cloudfront", "create_distribution"),
        ("update", "distribution"): ("cloudfront", "update_distribution"),
        ("delete", "distribution"): ("cloudfront", "delete_distribution"),
    }


class CloudformationService(AWSService):
    service_name = "cloudformation"
    api_names = ("cloudformation",)
    operations = {
        ("create", "stack"): ("cloudformation", "create_stack"),
        ("update", "stack"): ("cloudformation", "update_stack"),
        ("delete", "stack"): ("cloudformation", "delete_stack"),
    }


SERVICE_CLASSES = (
    AccessService,
    InfraService,
    StorageService,
    MessagingService,
    DnsService,
    LambdaService,
    MonitoringService,
    CdnService,
    CloudformationService,
)


def build_services(
    session: AWSSession, config: Any, logger: Optional[logging.Logger] = None
) -> List[AWSService]:
    """Construct every AWS domain service on a validated session.

    Args:
        session: Validated AWSSession
        config: Read-only configuration view
        logger: Logger handed to every service

    Returns:
        Services in registration order
    """
    return [service_class(session, config, logger) for service_class in SERVICE_CLASSES]
