from pet_values.pipeline import main

main()
