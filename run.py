import sys

if __name__ == "__main__":
    from pipeline_timing.main import main
    sys.exit(main())
