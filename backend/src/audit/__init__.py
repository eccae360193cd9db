"""Status history ledger"""
