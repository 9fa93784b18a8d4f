"""
Use Cases

Organized into domain folders:
- logs/: Recording, listing and exporting audit events
- retention/: Cleanup policies and log statistics

Import from subdirectories for better organization.
"""
