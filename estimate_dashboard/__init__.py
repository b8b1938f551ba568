from estimate_dashboard.models import Estimate, EstimateStatus, EstimateType
from estimate_dashboard.storage import FileBlobStore, LocalMirror
from estimate_dashboard.store import EstimateStore
from estimate_dashboard.sync import RemoteSync
