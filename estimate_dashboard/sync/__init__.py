from .remote_sync import RemoteSync, RowStore
