"""Text and record helpers shared by the adapters."""
