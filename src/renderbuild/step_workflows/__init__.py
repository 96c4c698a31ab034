from .rails import bundle, rake, rails_build

__all__ = ["bundle", "rake", "rails_build"]
