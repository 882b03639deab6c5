"""Pipeline core — identity, discovery, toolchain selection, policy and driver."""
