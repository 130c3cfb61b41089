from ridehail.booking.service import BookingService
from ridehail.booking.session import BookingSession

__all__ = ["BookingService", "BookingSession"]
