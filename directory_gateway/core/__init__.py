"""Core Business Logic Module

Framework-independent directory logic; nothing here imports Flask.

Module Structure:
    - directory/    : Remote directory HTTP client and merge-on-update
    - models.py     : DirectoryRecord, UpdateRequest, Role
    - outcome.py    : Tagged success/failure result
    - rbac.py       : Capabilities, operation table and authorization gate
    - validators.py : Validation of records before creation
"""
