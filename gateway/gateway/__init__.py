"""gateway — single-endpoint RPC gateway for task methods."""
