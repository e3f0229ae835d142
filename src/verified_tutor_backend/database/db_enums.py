'''
Static Python mirrors of the database ENUM types.
'''
import enum


class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member values."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class UserRole(ListableEnum):
    TUTOR = 'tutor'
    PARENT = 'parent'


class LessonStatusEnum(ListableEnum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class ConfirmationStatusEnum(ListableEnum):
    UNCONFIRMED = 'unconfirmed'
    VERIFIED = 'verified'
    DISPUTED = 'disputed'
    # Reserved for a manual / administrative override. No route produces it.
    NO_SHOW = 'no_show'
