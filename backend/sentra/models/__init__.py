from .clients import Client, Tag, ClientLink
from .billing import Invoice, Payment
from .calendar import CalendarEvent
from .progress import Component, ProgressStep, ProgressStepComment
from .chat import Chat, ChatMessage
from .auth import User
from .catalog import AddOnService, ServiceRequest

__all__ = [
    'Client', 'Tag', 'ClientLink',
    'Invoice', 'Payment',
    'CalendarEvent',
    'Component', 'ProgressStep', 'ProgressStepComment',
    'Chat', 'ChatMessage',
    'User',
    'AddOnService', 'ServiceRequest',
]
