"""debdeploy CLI commands"""
