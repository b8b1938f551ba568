from .remote import Remote
from .storage import Storage
