"""Image guessing quiz: session engine, item pool, timer and HTTP driver."""
