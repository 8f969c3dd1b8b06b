import enum


class PeriodType(enum.Enum):
    DAILY = 'Daily'
    WEEKLY = 'Weekly'
    MONTHLY = 'Monthly'
    QUARTERLY = 'Quarterly'
    YEARLY = 'Yearly'
    CUSTOM = 'Custom'

    @property
    def display_name(self):
        return self.value


class BudgetState(enum.Enum):
    """Lifecycle of a budget.  Budgets are deactivated, never deleted."""
    ACTIVE = 'active'
    INACTIVE = 'inactive'


class AlertType(enum.Enum):
    """Budget alert kinds with their trigger percentage.

    EXCEEDED uses 101 to mean "strictly above 100".
    """
    THRESHOLD_80 = ('80% budget reached', 80)
    THRESHOLD_100 = ('Budget limit reached', 100)
    EXCEEDED = ('Budget exceeded', 101)

    def __init__(self, description, threshold_percentage):
        self.description = description
        self.threshold_percentage = threshold_percentage


class NotificationChannel(enum.Enum):
    SMS = 'SMS'
    EMAIL = 'Email'
    PUSH = 'Push Notification'
    IN_APP = 'In-App Notification'

    @property
    def display_name(self):
        return self.value


class BudgetStatus(enum.Enum):
    ON_TRACK = 'ON_TRACK'
    WARNING = 'WARNING'
    EXCEEDED = 'EXCEEDED'
