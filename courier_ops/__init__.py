# Courier Operations Dashboard core
