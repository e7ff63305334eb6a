"""
Transaction dispatcher for concurrent downstream delivery.

Routes classified ISMP handler transactions to both the relayer accounting
and bridge aggregation services concurrently, failing as a whole.
"""
