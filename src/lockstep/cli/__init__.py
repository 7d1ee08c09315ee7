"""lockstep command line (typer)."""
