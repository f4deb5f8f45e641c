"""Runtime pieces: gateway adapter, bot wiring, snapshots and locking."""
