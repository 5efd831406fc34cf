from spannerdb.options import iterrow_data_loader

from libb import Setting

Setting.unlock()

spanner = Setting()
spanner.drivername='spanner'
spanner.project='test-project'
spanner.instance='test-instance'
spanner.database='test-db'
spanner.timeout=30
spanner.check_connection=True
spanner.serialize_queries=True
spanner.data_loader=iterrow_data_loader

Setting.lock()
