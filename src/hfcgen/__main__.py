from hfcgen.cli import main

raise SystemExit(main())
