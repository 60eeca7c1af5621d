"""Extract Storybook component props into a prefab manifest."""

__version__ = "1.0.0"
