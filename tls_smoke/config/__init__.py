"""
Configuration Management
=======================

Environment-based configuration using Pydantic Settings.

Components:
- settings: Server, browser and scenario settings
- logging: Structured logging configuration
"""
