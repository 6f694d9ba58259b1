"""ORM models."""

from rafflehub.models.raffle import Raffle
from rafflehub.models.sold_ticket import SoldTicket

__all__ = ["Raffle", "SoldTicket"]
