"""Walker geometry, nodes, links and the constellation aggregate."""
