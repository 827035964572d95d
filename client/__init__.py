from .api import ApiClient
from .context import AppContext
from .errors import ApiError, FormValidationError, NotFoundError, ResponseSchemaError
from .form import FormBuffer
from .store import LocalStore, RemoteStore
from .views import ListView
