from consensus_web.web import main

if __name__ == "__main__":
    raise SystemExit(main())
