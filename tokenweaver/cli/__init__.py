# Command line interface for TokenWeaver
