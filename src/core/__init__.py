"""Core components for skyform.

This module contains the foundational components including configuration
handling and the error taxonomy shared by the AWS bootstrap sequence.
"""
