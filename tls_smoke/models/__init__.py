"""
Data Models
===========

Immutable value objects passed between the certificate generator, the test
server, the browser driver and the scenario runner.
"""
