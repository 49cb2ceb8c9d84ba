from careers.models.application import Application
from careers.models.application_file import ApplicationFile

__all__ = ["Application", "ApplicationFile"]
