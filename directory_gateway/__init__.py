"""Directory Gateway Flask Application Package.

To use the Flask app:
    from directory_gateway.flask_app import create_app

To use the directory client on its own:
    from directory_gateway.core.directory import DirectoryClient
"""
# Note: flask_app is not imported here so the core client can be used
# without Flask.
