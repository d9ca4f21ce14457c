from minishell.shell import main

main()
