# Command-line interface for the annotation pipeline
