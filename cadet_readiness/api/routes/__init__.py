"""Route modules, one router per area: health, grades, fitness, readiness."""
