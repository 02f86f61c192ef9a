"""
Workshop modules: work order lifecycle and ledger, service requests, and
financial reporting.  Modules import the kernel; the kernel never imports
modules (except through ``_orm_registry`` at table-creation time).
"""
