"""Cover letter workspace backend and weekly industry insight refresh."""
