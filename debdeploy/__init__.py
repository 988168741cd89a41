"""debdeploy - ship a setup payload to a Debian host and run it as root"""

__version__ = "1.0.0"
