"""Synchronize the Java trust store with the operating system CA certificates."""
