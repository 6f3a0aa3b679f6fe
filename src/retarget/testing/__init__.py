"""Testing utilities: the simulated, fault-injecting surface driver."""
