from core.applications.service import ApplicationService

__all__ = ['ApplicationService']
