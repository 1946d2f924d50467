"""Internal acquisition loops for :class:`pydavis.client.DavisClient`."""
