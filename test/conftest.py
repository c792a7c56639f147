import matplotlib

# Headless backend for plotting tests.
matplotlib.use("Agg")
