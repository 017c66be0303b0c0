from miseq_demux.cli import main

main()
