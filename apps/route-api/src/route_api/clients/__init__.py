from route_api.clients.google_matrix_client import GoogleDistanceMatrixProvider
from route_api.clients.osrm_client import OSRMRouteClient, OSRMTableProvider

__all__ = ["GoogleDistanceMatrixProvider", "OSRMRouteClient", "OSRMTableProvider"]
