"""ImputeLab — services (report rendering)."""
