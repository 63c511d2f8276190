"""Request indexing services: the multi-index store, the depot network and sample seeding."""

from municipal_requests.services.depots import DEPOT_NAMES, DEPOT_ROUTES, build_depot_graph
from municipal_requests.services.request_store import RequestIndexStore, compare_urgency
from municipal_requests.services.seed import SeedDataError, load_sample_requests, seed_if_empty

__all__ = [
    "DEPOT_NAMES",
    "DEPOT_ROUTES",
    "RequestIndexStore",
    "SeedDataError",
    "build_depot_graph",
    "compare_urgency",
    "load_sample_requests",
    "seed_if_empty",
]
