"""Static game content: foods, morning conditions, plot twist pools, combo tiers, texts."""
