"""Pipeline orchestration for one GreenLoad monitoring cycle."""
