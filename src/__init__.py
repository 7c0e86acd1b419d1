"""skyform - AWS session bootstrap for infrastructure tooling.

This package resolves region and credential profile, establishes an
authenticated AWS session with an on-disk credential cache, and assembles
the per-domain services consumed by inventory and template tooling.
"""

__version__ = "1.0.0"
__author__ = "skyform maintainers"
