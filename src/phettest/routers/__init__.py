"""HTTP routers for phettest."""
