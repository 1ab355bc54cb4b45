"""Sifters: classify, gate and corroborate candidate events."""
