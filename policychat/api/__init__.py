"""HTTP surface exposing the session controller to the rendering layer."""
