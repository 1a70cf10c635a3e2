__version__ = "0.1.0"
__service_name__ = "tasker"
