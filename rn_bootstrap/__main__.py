from rn_bootstrap.pipeline import main

main()
