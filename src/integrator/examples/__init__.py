"""Usage examples for the integrator."""
