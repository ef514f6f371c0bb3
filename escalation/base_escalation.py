"""Abstract admin escalation contract."""

from abc import ABC, abstractmethod
from typing import Mapping


class BaseEscalation(ABC):
    """Contract for handing something over to the shop admins.

    Used both for submitted orders (so an admin can confirm stock and
    shipping) and for customers asking to talk to a human. The returned
    string goes back to the model as a tool result.
    """

    @abstractmethod
    def escalate(
        self,
        customer_id: str,
        summary: str,
        details: Mapping[str, str] | None = None,
    ) -> str:
        """Notify the admins and return a result string for the model.

        Implementations must not raise: a failed notification is reported
        in the returned text so the model can tell the customer.
        """
        ...
