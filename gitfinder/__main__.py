from gitfinder.cli import main

raise SystemExit(main())
