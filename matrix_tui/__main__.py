from matrix_tui.app import main

raise SystemExit(main())
