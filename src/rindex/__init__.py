import sys
from typing import List, Optional

__version__ = "0.1.0"


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the rindex server.
    This function is called when running the package with 'rindex'.
    """
    # Import here so the package imports without the server stack loaded
    from .config_module import load_config
    from .server import RIndexServer
    from .utils.logging_utils import setup_logging

    try:
        config = load_config(sys.argv[1:] if argv is None else argv)
        logger = setup_logging(
            config.get('server.log_level'),
            log_dir=config.get('logging.dir'),
            log_file=config.get('logging.file'),
            backup_count=config.get('logging.backup_count'),
            fmt=config.get('logging.format'),
        )
    except ValueError as e:
        print(f"Error starting server: {str(e)}", file=sys.stderr)
        sys.exit(1)

    try:
        server = RIndexServer(
            config.root_directory(),
            host=config.get('server.host'),
            port=config.get('server.port'),
            workers=config.get('server.workers'),
            confine_symlinks=config.get('filesystem.confine_symlinks'),
            mcp_path=config.get('server.mcp_path'),
            log_level=config.get('server.log_level'),
        )
        server.start()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Error starting server: {str(e)}")
        sys.exit(1)
    finally:
        for handler in logger.handlers:
            handler.flush()


# This allows the module to be executed directly
if __name__ == "__main__":
    main()
