from isilonpapi.core.http import ClientOptions, PapiClient
from isilonpapi.core.params import OrderedValues

__all__ = ["ClientOptions", "OrderedValues", "PapiClient"]
