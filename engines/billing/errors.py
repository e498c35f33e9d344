"""
KSA Billing Engine — Errors
=============================
Typed errors raised by BookingLifecycle.
Policies decide; the service raises one of these with the policy's
message. Nothing is mutated or allocated before a raise.
"""


class BillingError(Exception):
    """Base error for billing transitions."""
    pass


class MissingInvoiceReference(BillingError):
    """Storno requested for a booking with no resolvable invoice number."""

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(
            f"Booking '{booking_id}' has no invoice number to reverse; "
            f"pass reference_invoice_no or issue an invoice first."
        )


class InvalidTransition(BillingError):
    """Transition not allowed from the booking's current status."""

    def __init__(self, booking_id: str, status: str, transition: str):
        self.booking_id = booking_id
        self.status = status
        self.transition = transition
        super().__init__(
            f"Cannot {transition} booking '{booking_id}' "
            f"in status '{status}'."
        )
