"""
Enumerations shared by models and schemas.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Sender booking parcels (default role)
        ADMIN: Approves riders and assigns parcels
        RIDER: Approved delivery agent
    """
    USER = "user"
    ADMIN = "admin"
    RIDER = "rider"


class DeliveryStatus(str, enum.Enum):
    """
    Parcel delivery status.

    Status flow:
        pending → rider-assigned → in-transit → delivered
                                              → service_center_delivered
    """
    PENDING = "pending"
    RIDER_ASSIGNED = "rider-assigned"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    SERVICE_CENTER_DELIVERED = "service_center_delivered"


# Statuses that count toward a rider's earnings
COMPLETED_STATUSES = (DeliveryStatus.DELIVERED, DeliveryStatus.SERVICE_CENTER_DELIVERED)

# Statuses visible in a rider's task list
ACTIVE_TASK_STATUSES = (DeliveryStatus.RIDER_ASSIGNED, DeliveryStatus.IN_TRANSIT)


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class ParcelType(str, enum.Enum):
    DOCUMENT = "document"
    NON_DOCUMENT = "non-document"


class RiderStatus(str, enum.Enum):
    """
    Rider application status.

    Status flow:
        pending → approved → deactivated
        pending → (removed on cancel)
    """
    PENDING = "pending"
    APPROVED = "approved"
    DEACTIVATED = "deactivated"
