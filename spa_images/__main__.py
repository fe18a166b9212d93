from spa_images.main import run

run()
