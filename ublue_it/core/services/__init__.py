"""Services — resolver, host probes and the individual workflow steps."""
