from .match_guide import build_match_guide
from .reconciler import Reconciler, fuzzy_threshold, reconcile, reconcile_entries, split_compound
from .sources import CatalogSource, InMemoryCatalogSource, WorkbookCatalogSource
from .store import CatalogStore
