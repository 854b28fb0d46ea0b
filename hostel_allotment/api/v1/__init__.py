from hostel_allotment.api.v1.router import router

__all__ = ["router"]
